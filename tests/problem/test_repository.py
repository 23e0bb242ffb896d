import pytest

from catalog.data.schemas import Difficulty, ProblemFilters, ProblemUpdate
from catalog.errors import ConflictException
from tests.factories import make_problem


@pytest.mark.asyncio
async def test_create_and_find_problem(repository):
    created = await repository.create(
        make_problem("Two Sum", topics=["Array", "Hash Table"], hints=["Use a map"])
    )

    assert created.id is not None
    assert created.title_slug == "two-sum"
    assert created.difficulty == Difficulty.EASY

    by_id = await repository.find_by_id(created.id)
    by_slug = await repository.find_by_slug("two-sum")
    assert by_id == by_slug
    assert by_id.topics == ["Array", "Hash Table"]
    assert by_id.hints == ["Use a map"]


@pytest.mark.asyncio
async def test_find_missing_problem_returns_none(repository):
    assert await repository.find_by_id(999) is None
    assert await repository.find_by_slug("does-not-exist") is None


@pytest.mark.asyncio
async def test_create_ignores_supplied_id(repository):
    assert "id" not in make_problem("Two Sum", id=1).model_dump()

    first = await repository.create(make_problem("Two Sum", id=1))
    second = await repository.create(make_problem("Three Sum", id=1))

    assert first.id != second.id
    assert await repository.find_by_id(second.id) == second


@pytest.mark.asyncio
async def test_create_duplicate_slug_raises_conflict(repository):
    await repository.create(make_problem("Two Sum"))

    with pytest.raises(ConflictException) as exc_info:
        await repository.create(make_problem("Two Sum Again", title_slug="two-sum"))

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_find_page_filters_and_orders_by_id(repository):
    await repository.create(make_problem("Two Sum", topics=["Array"]))
    await repository.create(make_problem("Valid Parentheses", topics=["Stack"]))
    await repository.create(
        make_problem("Trapping Rain Water", Difficulty.HARD, topics=["Array", "Stack"])
    )
    await repository.create(make_problem("Arrays Of Arrays", topics=["Array Manipulation"]))

    array_problems = await repository.find_page(ProblemFilters(topic="Array"), 0, 10)
    assert [p.title_slug for p in array_problems] == ["two-sum", "trapping-rain-water"]

    hard_stack = await repository.find_page(
        ProblemFilters(topic="Stack", difficulty=Difficulty.HARD), 0, 10
    )
    assert [p.title_slug for p in hard_stack] == ["trapping-rain-water"]

    second_page = await repository.find_page(ProblemFilters(), 1, 2)
    assert [p.title_slug for p in second_page] == ["valid-parentheses", "trapping-rain-water"]

    assert await repository.count(ProblemFilters(topic="Array")) == 2
    assert await repository.count() == 4


@pytest.mark.asyncio
async def test_search_filter_is_case_insensitive_on_title_and_slug(repository):
    await repository.create(make_problem("Two Sum"))
    await repository.create(make_problem("Climbing Stairs", title_slug="stairs-climb"))

    by_title = await repository.find_page(ProblemFilters(search="TWO"), 0, 10)
    by_slug = await repository.find_page(ProblemFilters(search="stairs-cl"), 0, 10)

    assert [p.title for p in by_title] == ["Two Sum"]
    assert [p.title for p in by_slug] == ["Climbing Stairs"]


@pytest.mark.asyncio
async def test_search_orders_by_likes_and_caps_results(repository):
    await repository.create(make_problem("Two Sum II", likes=10))
    await repository.create(make_problem("Two Sum", likes=1000))
    await repository.create(make_problem("Two Sum III", likes=10))

    results = await repository.search("two sum")
    assert [p.title for p in results] == ["Two Sum", "Two Sum II", "Two Sum III"]

    capped = await repository.search("two sum", limit=2)
    assert len(capped) == 2


@pytest.mark.asyncio
async def test_search_escapes_like_wildcards(repository):
    await repository.create(make_problem("Two Sum"))

    assert await repository.search("%") == []
    assert await repository.search("_wo") == []


@pytest.mark.asyncio
async def test_find_by_difficulty_and_topic(repository):
    await repository.create(make_problem("Two Sum", topics=["Array"]))
    await repository.create(make_problem("LRU Cache", Difficulty.MEDIUM, topics=["Design"]))

    medium = await repository.find_by_difficulty(Difficulty.MEDIUM)
    design = await repository.find_by_topic("Design")

    assert [p.title for p in medium] == ["LRU Cache"]
    assert [p.title for p in design] == ["LRU Cache"]
    assert await repository.find_by_topic("Graph") == []
    assert await repository.find_by_topic("  ") == []


@pytest.mark.asyncio
async def test_find_by_ids_skips_missing(repository):
    first = await repository.create(make_problem("Two Sum"))
    second = await repository.create(make_problem("Three Sum"))

    found = await repository.find_by_ids([second.id, 999, first.id])

    assert [p.id for p in found] == [first.id, second.id]
    assert await repository.find_by_ids([]) == []


@pytest.mark.asyncio
async def test_update_problem(repository):
    created = await repository.create(make_problem("Two Sum", likes=5))

    updated = await repository.update(
        created.id, ProblemUpdate(difficulty=Difficulty.HARD, likes=6, title=None)
    )

    assert updated.difficulty == Difficulty.HARD
    assert updated.likes == 6
    # Required columns are never blanked by an explicit null.
    assert updated.title == "Two Sum"
    assert updated.updated_at >= created.updated_at


@pytest.mark.asyncio
async def test_update_missing_problem_returns_none(repository):
    assert await repository.update(999, ProblemUpdate(likes=1)) is None


@pytest.mark.asyncio
async def test_update_to_taken_slug_raises_conflict(repository):
    await repository.create(make_problem("Two Sum"))
    other = await repository.create(make_problem("Three Sum"))

    with pytest.raises(ConflictException):
        await repository.update(other.id, ProblemUpdate(title_slug="two-sum"))


@pytest.mark.asyncio
async def test_delete_problem(repository):
    created = await repository.create(make_problem("Two Sum"))

    assert await repository.delete(created.id) is True
    assert await repository.find_by_id(created.id) is None
    assert await repository.delete(created.id) is False


@pytest.mark.asyncio
async def test_aggregate_statistics(repository):
    seeds = [
        ("Easy One", Difficulty.EASY, ["A", "B"]),
        ("Easy Two", Difficulty.EASY, ["B", "C"]),
        ("Easy Three", Difficulty.EASY, ["A"]),
        ("Medium One", Difficulty.MEDIUM, ["C"]),
        ("Medium Two", Difficulty.MEDIUM, ["D"]),
        ("Hard One", Difficulty.HARD, []),
    ]
    for title, difficulty, topics in seeds:
        await repository.create(make_problem(title, difficulty, topics=topics))

    stats = await repository.aggregate_statistics()

    assert stats.total == 6
    assert stats.by_difficulty.easy == 3
    assert stats.by_difficulty.medium == 2
    assert stats.by_difficulty.hard == 1
    assert stats.total_topics == 4
    assert set(stats.topics) == {"A", "B", "C", "D"}
