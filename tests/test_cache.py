from ccontent.content.cache import SubsectionCache, needs_processing
from ccontent.content.normalizer import parse_module_markdown


def test_needs_processing_predicate() -> None:
    structured = parse_module_markdown("#### A\nbody")[0]

    assert needs_processing(None)
    assert needs_processing({"title": "raw", "content": "text"})
    assert needs_processing({"pages": []})
    assert needs_processing({"pages": [{"pageTitle": "x", "content": "  "}]})
    assert not needs_processing({"pages": [{"pageTitle": "x", "content": "ready"}]})
    assert not needs_processing(structured)
    assert not needs_processing([structured])
    assert needs_processing([])


def test_tokens_are_monotonic_per_id() -> None:
    cache: SubsectionCache[str] = SubsectionCache()

    assert cache.issue_token("a") == 1
    assert cache.issue_token("a") == 2
    assert cache.issue_token("b") == 1
    assert cache.latest_token("a") == 2


def test_stale_results_are_discarded() -> None:
    cache: SubsectionCache[str] = SubsectionCache()
    old = cache.issue_token("sub")
    new = cache.issue_token("sub")

    assert cache.store("sub", new, "fresh")
    assert not cache.store("sub", old, "stale")
    assert cache.get("sub") == "fresh"


def test_store_replaces_instead_of_merging() -> None:
    cache: SubsectionCache[dict] = SubsectionCache()
    first = cache.issue_token("sub")
    cache.store("sub", first, {"title": "old", "pages": [1]})
    second = cache.issue_token("sub")
    cache.store("sub", second, {"title": "new"})

    assert cache.get("sub") == {"title": "new"}


def test_get_or_process_skips_structured_entries() -> None:
    cache: SubsectionCache[list] = SubsectionCache()
    calls = []

    def process() -> list:
        calls.append(1)
        return parse_module_markdown("#### A\nbody", module_id="m1")

    first = cache.get_or_process("m1", process)
    second = cache.get_or_process("m1", process)

    assert first is second
    assert len(calls) == 1
    cache.get_or_process("m1", process, force=True)
    assert len(calls) == 2


def test_get_or_process_returns_newer_result_when_superseded() -> None:
    cache: SubsectionCache[str] = SubsectionCache()

    def process() -> str:
        token = cache.issue_token("x")
        cache.store("x", token, "newer")
        return "older"

    assert cache.get_or_process("x", process) == "newer"
    assert cache.get("x") == "newer"


def test_invalidate_and_container_protocol() -> None:
    cache: SubsectionCache[str] = SubsectionCache()
    cache.store("x", cache.issue_token("x"), "v")

    assert "x" in cache
    assert len(cache) == 1
    cache.invalidate("x")
    assert "x" not in cache
