"""Tests for Router.route — fan-out dispatch and terminal callbacks."""

import re
from typing import Any

import anyio
import pytest

from scraperoute.config import RouterConfig
from scraperoute.errors import MissingActionError, RouterMisuseError
from scraperoute.routing.router import Router


class Recorder:
    """Collects calls made to terminal callbacks."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)


class TestScenarios:
    @pytest.mark.asyncio
    async def test_single_route_match(self, action) -> None:  # noqa: ANN001
        done = Recorder()
        router = Router().on("/user/:id").get().attach(action)

        await router.route("/user/7", done)

        assert action.params == [{"url": "/user/7", "id": "7"}]
        assert action.gets == ["/user/7"]
        assert done.calls == [(True,)]

    @pytest.mark.asyncio
    async def test_no_match_calls_otherwise(self, action) -> None:  # noqa: ANN001
        otherwise, done = Recorder(), Recorder()
        router = Router().on("/x").get().attach(action).otherwise(otherwise)

        await router.route("/y", done)

        assert otherwise.calls == [("/y",)]
        assert done.calls == [(False,)]
        assert action.gets == []

    @pytest.mark.asyncio
    async def test_empty_router(self) -> None:
        otherwise, errors, done = Recorder(), Recorder(), Recorder()
        router = Router().otherwise(otherwise).on_error(errors)

        await router.route("/anything", done)

        assert otherwise.calls == [("/anything",)]
        assert errors.calls == []
        assert done.calls == [(False,)]

    @pytest.mark.asyncio
    async def test_returns_router(self) -> None:
        router = Router()
        assert await router.route("/a") is router

    @pytest.mark.asyncio
    async def test_callback_optional(self, action) -> None:  # noqa: ANN001
        router = Router().on("/a").attach(action)
        await router.route("/a")
        assert action.gets == ["/a"]


class TestFanOut:
    @pytest.mark.asyncio
    async def test_every_matching_route_dispatched(self, make_action: type) -> None:
        first, second, third = make_action(), make_action(), make_action()
        router = (
            Router()
            .on("/items/:id").attach(first)
            .on(re.compile(r"/items/\d+")).attach(second)
            .on("/other").attach(third)
        )

        await router.route("/items/5")

        assert first.gets == ["/items/5"]
        assert second.gets == ["/items/5"]
        assert third.gets == []

    @pytest.mark.asyncio
    async def test_request_dispatch(self, action) -> None:  # noqa: ANN001
        router = Router().on("/search/:q").request({"method": "POST"}).attach(action)

        await router.route("/search/cats")

        assert action.requests == [{"method": "POST", "uri": "/search/cats"}]
        assert action.params == [{"url": "/search/cats", "q": "cats"}]

    @pytest.mark.asyncio
    async def test_predicate_params_injected(self, action) -> None:  # noqa: ANN001
        router = Router().on(lambda url: {"lang": url[1:3]}).attach(action)
        await router.route("/da/nyheder")
        assert action.params == [{"lang": "da"}]

    @pytest.mark.asyncio
    async def test_bounded_concurrency_still_evaluates_all(self, make_action: type) -> None:
        actions = [make_action() for _ in range(5)]
        router = Router(RouterConfig(max_concurrency=1))
        for item in actions:
            router.on("/all").attach(item)

        await router.route("/all")

        assert all(item.gets == ["/all"] for item in actions)

    @pytest.mark.asyncio
    async def test_reused_for_many_urls(self, action) -> None:  # noqa: ANN001
        router = Router().on("/p/:n").attach(action)
        await (await router.route("/p/1")).route("/p/2")
        assert action.gets == ["/p/1", "/p/2"]


class TestErrors:
    @pytest.mark.asyncio
    async def test_matcher_error_goes_to_on_error(self) -> None:
        errors, otherwise, done = Recorder(), Recorder(), Recorder()

        def explode(url: str) -> bool:
            raise ValueError("bad matcher")

        router = Router().on(explode).on_error(errors).otherwise(otherwise)

        await router.route("/a", done)

        assert len(errors.calls) == 1
        error, url = errors.calls[0]
        assert isinstance(error, ValueError)
        assert url == "/a"
        assert otherwise.calls == []
        assert done.calls == [(False,)]

    @pytest.mark.asyncio
    async def test_missing_action(self) -> None:
        errors, done = Recorder(), Recorder()
        router = Router().on("/a").on_error(errors)

        await router.route("/a", done)

        assert isinstance(errors.calls[0][0], MissingActionError)
        assert done.calls == [(True,)]

    @pytest.mark.asyncio
    async def test_first_error_only(self) -> None:
        errors = Recorder()

        def explode(url: str) -> bool:
            raise RuntimeError(url)

        router = Router().on(explode).on(explode).on_error(errors)
        await router.route("/a")

        assert len(errors.calls) == 1

    @pytest.mark.asyncio
    async def test_dispatch_error_goes_to_on_error(self, make_action: type) -> None:
        errors = Recorder()

        class Failing(make_action):  # type: ignore[misc,valid-type]
            def get(self, url: str) -> None:
                raise ConnectionError(url)

        healthy = make_action()
        router = Router().on("/a").attach(Failing()).on("/a").attach(healthy).on_error(errors)

        await router.route("/a")

        assert isinstance(errors.calls[0][0], ConnectionError)
        assert healthy.gets == ["/a"]

    @pytest.mark.asyncio
    async def test_default_error_callback_is_silent(self) -> None:
        def explode(url: str) -> bool:
            raise ValueError(url)

        done = Recorder()
        await Router().on(explode).route("/a", done)
        assert done.calls == [(False,)]

    @pytest.mark.asyncio
    async def test_completion_runs_when_otherwise_raises(self) -> None:
        done = Recorder()

        def otherwise(url: str) -> None:
            raise LookupError(url)

        router = Router().otherwise(otherwise)
        with pytest.raises(LookupError):
            await router.route("/a", done)
        assert done.calls == [(False,)]


class TestCallbacks:
    @pytest.mark.asyncio
    async def test_last_registration_wins(self) -> None:
        first, second = Recorder(), Recorder()
        router = Router().otherwise(first).otherwise(second)

        await router.route("/a")

        assert first.calls == []
        assert second.calls == [("/a",)]

    @pytest.mark.asyncio
    async def test_config_seeds_callbacks(self) -> None:
        otherwise = Recorder()
        await Router(RouterConfig(otherwise=otherwise)).route("/a")
        assert otherwise.calls == [("/a",)]

    @pytest.mark.asyncio
    async def test_async_callbacks_awaited(self) -> None:
        seen: list[Any] = []

        async def otherwise(url: str) -> None:
            await anyio.sleep(0)
            seen.append(url)

        async def done(matched: bool) -> None:
            seen.append(matched)

        await Router().otherwise(otherwise).route("/a", done)
        assert seen == ["/a", False]


class TestAwaitableDispatch:
    @pytest.mark.asyncio
    async def test_awaited_inline_outside_context(self, make_action: type) -> None:
        finished: list[str] = []

        class Async(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                await anyio.sleep(0)
                finished.append(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        await Router().on("/a").attach(Async()).route("/a")
        assert finished == ["/a"]

    @pytest.mark.asyncio
    async def test_background_inside_context(self, make_action: type) -> None:
        release = anyio.Event()
        finished: list[str] = []
        done = Recorder()

        class Slow(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                await release.wait()
                finished.append(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        router = Router().on("/a").attach(Slow())
        async with router:
            await router.route("/a", done)
            assert done.calls == [(True,)]
            assert finished == []
            release.set()
        assert finished == ["/a"]

    @pytest.mark.asyncio
    async def test_background_failure_reported(self, make_action: type) -> None:
        errors = Recorder()

        class Broken(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                raise TimeoutError(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        router = Router().on("/a").attach(Broken()).on_error(errors)
        async with router:
            await router.route("/a")

        assert len(errors.calls) == 1
        assert isinstance(errors.calls[0][0], TimeoutError)
        assert errors.calls[0][1] == "/a"

    @pytest.mark.asyncio
    async def test_background_failures_do_not_cancel_siblings(self, make_action: type) -> None:
        finished: list[str] = []

        class Broken(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                raise TimeoutError(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        class Slow(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                await anyio.sleep(0.01)
                finished.append(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        router = Router().on("/a").attach(Broken()).on("/a").attach(Slow())
        async with router:
            await router.route("/a")
        assert finished == ["/a"]

    @pytest.mark.asyncio
    async def test_raising_error_callback_does_not_cancel_siblings(
        self, make_action: type,
    ) -> None:
        finished: list[str] = []

        class Broken(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                raise TimeoutError(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        class Slow(make_action):  # type: ignore[misc,valid-type]
            async def _scrape(self, url: str) -> None:
                await anyio.sleep(0.05)
                finished.append(url)

            def get(self, url: str) -> Any:
                return self._scrape(url)

        def on_error(error: Exception, url: str) -> None:
            raise RuntimeError("callback bug")

        router = Router().on("/a").attach(Broken()).on("/a").attach(Slow()).on_error(on_error)
        async with router:
            await router.route("/a")
        assert finished == ["/a"]


class TestBackgroundScope:
    @pytest.mark.asyncio
    async def test_exit_without_enter(self) -> None:
        with pytest.raises(RouterMisuseError, match="not entered"):
            await Router().__aexit__(None, None, None)

    @pytest.mark.asyncio
    async def test_enter_twice(self) -> None:
        router = Router()
        async with router:
            with pytest.raises(RouterMisuseError, match="already entered"):
                await router.__aenter__()
