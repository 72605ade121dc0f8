from __future__ import annotations

import asyncio

import pytest

from async_expand import (
    END,
    Abort,
    AbandonAndContinue,
    AbortOnError,
    Data,
    End,
    Event,
    Failure,
    Flattener,
    FlattenerState,
    InnerSequenceError,
    OuterSourceError,
    Recovered,
    RecoverWith,
    SkipSilently,
    SplitPolicy,
    Stream,
    SubscriptionClosedError,
    SubstituteAndAbandonSequence,
    SubstituteAndContinueSameSequence,
    SubstituteAndResume,
    TimeoutError,
    concat,
    flatten,
)

from tests.helpers import ActivationCounter, Boom, data_of, faulty, pull_all


INNER = {"a": [1, 2], "b": [3, 4]}


def by_name(name: str) -> Stream[int, Boom]:
    return Stream.of(*INNER[name])


# Ordering / single flight


@pytest.mark.asyncio
async def test_inner_streams_are_not_interleaved() -> None:
    events = await pull_all(flatten(Stream.of("a", "b"), by_name).subscribe())

    assert data_of(events) == [1, 2, 3, 4]
    assert isinstance(events[-1], End)


@pytest.mark.asyncio
async def test_at_most_one_inner_stream_is_subscribed(counter: ActivationCounter) -> None:
    def mapper(name: str) -> Stream[int, Boom]:
        return counter.track(name, by_name(name))

    events = await pull_all(flatten(Stream.of("a", "b", "a"), mapper).subscribe())

    assert data_of(events) == [1, 2, 3, 4, 1, 2]
    assert counter.peak == 1
    assert counter.active == 0
    assert counter.released == ["a", "b", "a"]


@pytest.mark.asyncio
async def test_next_outer_item_is_pulled_only_after_inner_ends() -> None:
    mapped: list[str] = []

    def mapper(name: str) -> Stream[int, Boom]:
        mapped.append(name)
        return by_name(name)

    subscription = flatten(Stream.of("a", "b"), mapper).subscribe()

    assert await subscription.pull() == Data(1)
    assert await subscription.pull() == Data(2)
    assert mapped == ["a"]
    assert await subscription.pull() == Data(3)
    assert mapped == ["a", "b"]


@pytest.mark.asyncio
async def test_empty_outer_completes_immediately() -> None:
    subscription = flatten(Stream.empty(), by_name).subscribe()

    assert isinstance(await subscription.pull(), End)


@pytest.mark.asyncio
async def test_empty_inner_streams_are_passed_over() -> None:
    stream = flatten(Stream.of(0, 1, 0), lambda n: Stream.of(*range(n * 3)))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [0, 1, 2]


@pytest.mark.asyncio
async def test_expand_is_flatten() -> None:
    chars = Stream.of("Driver", "Family").expand(lambda word: Stream.of(*word))

    assert [c async for c in chars] == list("DriverFamily")


@pytest.mark.asyncio
async def test_expand_takes_a_recovery_policy() -> None:
    inner = {"x": faulty(1, 2, 3, fail_at=2), "y": Stream.of(10)}
    stream = Stream.of("x", "y").expand(inner.__getitem__, policy=SubstituteAndResume(-1))

    assert [v async for v in stream] == [1, -1, 3, 10]


@pytest.mark.asyncio
async def test_each_subscription_runs_a_fresh_flattener() -> None:
    stream = flatten(Stream.of("a", "b"), by_name)

    first = await pull_all(stream.subscribe())
    second = await pull_all(stream.subscribe())

    assert data_of(first) == data_of(second) == [1, 2, 3, 4]


# Inner recovery


@pytest.mark.asyncio
async def test_abandon_and_continue_drops_rest_of_failed_stream() -> None:
    inner = {"x": faulty(1, 2, 3, 4, 5, fail_at=3), "y": Stream.of(10)}
    stream = flatten(Stream.of("x", "y"), inner.__getitem__, policy=AbandonAndContinue(-1))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, 2, -1, 10]
    assert isinstance(events[-1], End)


@pytest.mark.asyncio
async def test_substitute_and_resume_keeps_pulling_failed_stream() -> None:
    inner = {"x": faulty(1, 2, 3, 4, 5, fail_at=3), "y": Stream.of(10)}
    stream = flatten(Stream.of("x", "y"), inner.__getitem__, policy=SubstituteAndResume(-1))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, 2, -1, 4, 5, 10]


@pytest.mark.asyncio
async def test_substitute_and_resume_on_raising_source_moves_on() -> None:
    async def numbers():
        yield 1
        raise Boom("gone")
        yield 2  # pragma: no cover

    inner = {"x": Stream.from_async(numbers), "y": Stream.of(10)}
    stream = flatten(Stream.of("x", "y"), inner.__getitem__, policy=SubstituteAndResume(0))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, 0, 10]


@pytest.mark.asyncio
async def test_substitute_and_resume_on_failed_nested_flatten_moves_on() -> None:
    nested = flatten(Stream.of("i"), lambda _: faulty(1, 2, fail_at=2))
    inner = {"x": nested, "y": Stream.of(10)}
    flattener = Flattener(Stream.of("x", "y"), inner.__getitem__, policy=SubstituteAndResume(-1))

    events = await pull_all(flattener)

    assert data_of(events) == [1, -1, 10]
    assert isinstance(events[-1], End)
    assert len(flattener.log) == 1


@pytest.mark.asyncio
async def test_substitute_and_resume_continues_concat_after_nested_failure() -> None:
    nested = flatten(Stream.of("i"), lambda _: faulty(1, 2, fail_at=2))
    inner = {"x": concat(nested, Stream.of(9)), "y": Stream.of(10)}
    stream = flatten(Stream.of("x", "y"), inner.__getitem__, policy=SubstituteAndResume(-1))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, -1, 9, 10]
    assert isinstance(events[-1], End)


@pytest.mark.asyncio
async def test_substitute_and_resume_drops_subscription_that_raised() -> None:
    class Broken:
        pulls = 0

        async def pull(self) -> Event[int, Boom]:
            Broken.pulls += 1
            raise Boom("broken")

        async def release(self) -> None:
            pass

    inner = {"x": Stream(Broken), "y": Stream.of(10)}
    flattener = Flattener(Stream.of("x", "y"), inner.__getitem__, policy=SubstituteAndResume(-1))

    events = await pull_all(flattener)

    assert data_of(events) == [-1, 10]
    assert isinstance(events[-1], End)
    assert Broken.pulls == 1
    assert len(flattener.log) == 1


@pytest.mark.asyncio
async def test_skip_silently_emits_nothing_for_failed_stream() -> None:
    inner = {"x": faulty(1, 2, 3, fail_at=2), "y": Stream.of(10)}
    stream = flatten(Stream.of("x", "y"), inner.__getitem__, policy=SkipSilently())

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, 10]


@pytest.mark.asyncio
async def test_inner_abort_forwards_one_failure_and_stops(counter: ActivationCounter) -> None:
    inner = {"x": faulty(1, 2, 3, fail_at=2), "y": Stream.of(10)}
    mapped: list[str] = []

    def mapper(name: str) -> Stream[int, Boom]:
        mapped.append(name)
        return counter.track(name, inner[name])

    flattener = Flattener(Stream.of("x", "y"), mapper, policy=AbortOnError())

    events = await pull_all(flattener)

    assert data_of(events) == [1]
    failure = events[-1]
    assert isinstance(failure, Failure)
    assert isinstance(failure.cause, InnerSequenceError)
    assert isinstance(failure.cause.cause, Boom)
    assert failure.cause.item == "x"
    assert mapped == ["x"]
    assert counter.active == 0
    assert flattener.state is FlattenerState.FAILED
    assert flattener.failure is failure.cause


@pytest.mark.asyncio
async def test_mapper_exception_goes_through_inner_policy() -> None:
    def mapper(name: str) -> Stream[int, Boom]:
        if name == "bad":
            raise Boom("no stream for you")
        return Stream.of(1)

    stream = flatten(Stream.of("bad", "ok"), mapper, policy=SubstituteAndResume(-1))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [-1, 1]


@pytest.mark.asyncio
async def test_custom_policy_decides_per_error() -> None:
    def decide(error: InnerSequenceError):
        if error.item == "x":
            return SubstituteAndAbandonSequence(0)
        return Abort(error)

    inner = {"x": faulty(1, 2, fail_at=1), "y": faulty(5, 6, fail_at=6)}
    stream = flatten(Stream.of("x", "y"), inner.__getitem__, policy=RecoverWith(decide))

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [0, 5]
    assert isinstance(events[-1], Failure)


@pytest.mark.asyncio
async def test_unknown_decision_is_a_programming_error() -> None:
    stream = flatten(
        Stream.of("x"),
        lambda _: faulty(1, fail_at=1),
        policy=RecoverWith(lambda e: "continue please"),  # type: ignore[arg-type,return-value]
    )

    with pytest.raises(TypeError):
        await stream.subscribe().pull()


# Outer failures


class _SubstituteEverything:
    """Asks for a substitute even where none is possible."""

    def on_outer_error(self, error: OuterSourceError, /) -> SubstituteAndContinueSameSequence[int]:
        return SubstituteAndContinueSameSequence(-1)

    def on_inner_error(self, error: InnerSequenceError, /) -> SubstituteAndContinueSameSequence[int]:
        return SubstituteAndContinueSameSequence(-1)


@pytest.mark.asyncio
async def test_outer_failure_after_one_inner_aborts() -> None:
    boom = Boom("outer broke")
    outer = Stream.events(Data("a"), Failure(boom), Data("b"), END)
    mapped: list[str] = []

    def mapper(name: str) -> Stream[int, Boom]:
        mapped.append(name)
        return by_name(name)

    events = await pull_all(flatten(outer, mapper).subscribe())

    assert data_of(events) == [1, 2]
    failures = [event for event in events if isinstance(event, Failure)]
    assert len(failures) == 1
    assert isinstance(failures[0].cause, OuterSourceError)
    assert failures[0].cause.cause is boom
    assert mapped == ["a"]


@pytest.mark.parametrize(
    "policy",
    [
        AbandonAndContinue(-1),
        SubstituteAndResume(-1),
        SkipSilently(),
        _SubstituteEverything(),
        SplitPolicy(outer=_SubstituteEverything(), inner=SkipSilently()),
    ],
)
@pytest.mark.asyncio
async def test_outer_failure_is_fatal_under_any_policy(policy) -> None:
    outer = Stream.events(Data("a"), Failure(Boom("x")), Data("b"), END)
    flattener = Flattener(outer, by_name, policy=policy)

    events = await pull_all(flattener)

    assert data_of(events) == [1, 2]
    assert isinstance(events[-1], Failure)
    assert isinstance(events[-1].cause, OuterSourceError)
    assert flattener.state is FlattenerState.FAILED


# Lifecycle


@pytest.mark.asyncio
async def test_state_transitions() -> None:
    flattener = Flattener(Stream.of("a"), by_name, policy=AbortOnError())
    assert flattener.state is FlattenerState.IDLE

    await flattener.pull()
    assert flattener.state is FlattenerState.CONSUMING_INNER
    assert flattener.active is not None

    await flattener.pull()
    assert await flattener.pull() == END
    assert flattener.state is FlattenerState.COMPLETED
    assert flattener.active is None


@pytest.mark.asyncio
async def test_pull_after_completion_keeps_returning_end() -> None:
    flattener = Flattener(Stream.empty(), by_name, policy=AbortOnError())
    assert await flattener.pull() == END

    assert await flattener.pull() == END
    assert flattener.state is FlattenerState.COMPLETED


@pytest.mark.asyncio
async def test_pull_after_failure_returns_end() -> None:
    flattener = Flattener(Stream.of("x"), lambda _: faulty(1, 2, fail_at=2), policy=AbortOnError())

    events = await pull_all(flattener)

    assert isinstance(events[-1], Failure)
    assert await flattener.pull() == END
    assert flattener.state is FlattenerState.FAILED


@pytest.mark.asyncio
async def test_cancel_releases_inner_and_outer(counter: ActivationCounter) -> None:
    outer = counter.track("outer", Stream.of("a", "b"))
    flattener = Flattener(
        outer,
        lambda name: counter.track(name, by_name(name)),
        policy=AbortOnError(),
    )

    assert await flattener.pull() == Data(1)
    assert counter.active == 2

    await flattener.cancel()

    assert flattener.state is FlattenerState.CANCELLED
    assert counter.active == 0
    assert counter.subscribed == ["outer", "a"]
    with pytest.raises(SubscriptionClosedError):
        await flattener.pull()


@pytest.mark.asyncio
async def test_cancel_after_completion_is_a_noop() -> None:
    flattener = Flattener(Stream.empty(), by_name, policy=AbortOnError())
    await flattener.pull()

    await flattener.cancel()

    assert flattener.state is FlattenerState.COMPLETED


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        flatten(Stream.of("a"), by_name, timeout=0)


# Timeout


def slow(*values: int, stall_after: int) -> Stream[int, Exception]:
    async def numbers():
        for value in values:
            if value == stall_after:
                await asyncio.sleep(10)
            yield value

    return Stream.from_async(numbers)


@pytest.mark.asyncio
async def test_timeout_fails_inner_stream_through_policy() -> None:
    inner = {"x": slow(1, 2, stall_after=2), "y": Stream.of(10)}
    stream = flatten(
        Stream.of("x", "y"),
        inner.__getitem__,
        policy=AbandonAndContinue(-1),
        timeout=0.05,
    )

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, -1, 10]


@pytest.mark.asyncio
async def test_timed_out_stream_is_not_resumed() -> None:
    inner = {"x": slow(1, 2, 3, stall_after=2), "y": Stream.of(10)}
    stream = flatten(
        Stream.of("x", "y"),
        inner.__getitem__,
        policy=SubstituteAndResume(-1),
        timeout=0.05,
    )

    events = await pull_all(stream.subscribe())

    assert data_of(events) == [1, -1, 10]


@pytest.mark.asyncio
async def test_timeout_abort_carries_timeout_error() -> None:
    stream = flatten(Stream.of("x"), lambda _: slow(1, stall_after=1), timeout=0.05)

    events = await pull_all(stream.subscribe())

    failure = events[-1]
    assert isinstance(failure, Failure)
    assert isinstance(failure.cause, InnerSequenceError)
    assert isinstance(failure.cause.cause, TimeoutError)
    assert failure.cause.cause.seconds == 0.05


# Observation


@pytest.mark.asyncio
async def test_recoveries_are_observed_and_logged() -> None:
    seen: list[Recovered] = []
    inner = {"x": faulty(1, 2, fail_at=1), "y": faulty(3, fail_at=3)}
    flattener = Flattener(
        Stream.of("x", "y"),
        inner.__getitem__,
        policy=SkipSilently(),
        observer=seen.append,
    )

    events = await pull_all(flattener)

    assert data_of(events) == []
    assert [record.item for record in seen] == ["x", "y"]
    assert list(flattener.log) == seen
    assert all(isinstance(record.error.cause, Boom) for record in seen)


@pytest.mark.asyncio
async def test_abort_is_not_reported_as_recovery() -> None:
    seen: list[Recovered] = []
    stream = flatten(Stream.of("x"), lambda _: faulty(1, fail_at=1), observer=seen.append)

    await pull_all(stream.subscribe())

    assert seen == []
