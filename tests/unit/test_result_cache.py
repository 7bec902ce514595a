import pytest
from pydantic import BaseModel

from omnisearch.contracts.quick_open_v1 import GLOBAL_KEY, QueryResult, ScopedResults
from omnisearch.orchestrators.search.cache import ResultCache, wrap_result


class Symbol(BaseModel):
    name: str
    line: int


class TestWrapResult:
    def test_mapping_is_copied_and_tagged(self):
        raw = {"path": "a.py"}
        wrapped = wrap_result(raw, "Files")
        assert wrapped == {"path": "a.py", "source_provider": "Files"}
        assert "source_provider" not in raw

    def test_pydantic_model_is_dumped(self):
        wrapped = wrap_result(Symbol(name="main", line=3), "Symbols")
        assert wrapped == {"name": "main", "line": 3, "source_provider": "Symbols"}

    def test_non_mapping_rejected(self):
        with pytest.raises(TypeError, match="must be mappings"):
            wrap_result("a.py", "Files")


class TestResultCache:
    def test_loading_then_settled(self):
        cache = ResultCache()
        cache.mark_loading("yolo", "Files", "Files", [GLOBAL_KEY])
        entry = cache.get("yolo", "Files")
        assert entry == QueryResult(
            title="Files", results={GLOBAL_KEY: ScopedResults(results=[], loading=True)}
        )
        assert entry.loading is True
        assert cache.is_loading("yolo") is True

        assert cache.settle("yolo", "Files", GLOBAL_KEY, results=[{"path": "yolo"}]) is True
        entry = cache.get("yolo", "Files")
        assert entry.results[GLOBAL_KEY] == ScopedResults(
            results=[{"path": "yolo"}], loading=False, error=None
        )
        assert cache.is_loading("yolo") is False

    def test_error_clears_results(self):
        cache = ResultCache()
        cache.mark_loading("q", "Files", "Files", [GLOBAL_KEY])
        cache.settle("q", "Files", GLOBAL_KEY, error="Files (global): boom")
        scoped = cache.get("q", "Files").results[GLOBAL_KEY]
        assert scoped.results == []
        assert scoped.loading is False
        assert scoped.error == "Files (global): boom"

    def test_settle_without_entry_is_ignored(self):
        cache = ResultCache()
        assert cache.settle("q", "Files", GLOBAL_KEY, results=[]) is False
        cache.mark_loading("q", "Files", "Files", ["/a"])
        assert cache.settle("q", "Files", "/b", results=[]) is False
        assert cache.get("never", "Files") is None

    def test_reads_are_copies(self):
        cache = ResultCache()
        cache.mark_loading("q", "Files", "Files", [GLOBAL_KEY])
        cache.settle("q", "Files", GLOBAL_KEY, results=[{"path": "a"}])
        cache.get("q", "Files").results[GLOBAL_KEY].results.append({"path": "b"})
        assert cache.get("q", "Files").results[GLOBAL_KEY].results == [{"path": "a"}]

    def test_reload_keeps_previous_results(self):
        cache = ResultCache()
        cache.mark_loading("q", "Files", "Files", [GLOBAL_KEY])
        cache.settle("q", "Files", GLOBAL_KEY, results=[{"path": "a"}])
        cache.mark_loading("q", "Files", "Files", [GLOBAL_KEY])
        scoped = cache.get("q", "Files").results[GLOBAL_KEY]
        assert scoped.loading is True
        assert scoped.results == [{"path": "a"}]

    def test_drop_loading(self):
        cache = ResultCache()
        cache.mark_loading("q", "Settled", "Settled", [GLOBAL_KEY])
        cache.settle("q", "Settled", GLOBAL_KEY, results=[{"path": "a"}])
        cache.mark_loading("q", "Pending", "Pending", [GLOBAL_KEY])
        cache.mark_loading("q", "Dirs", "Dirs", ["/a", "/b"])
        cache.settle("q", "Dirs", "/a", results=[])

        cache.drop_loading("q")

        assert cache.get("q", "Settled").results[GLOBAL_KEY].results == [{"path": "a"}]
        assert cache.get("q", "Pending") is None
        assert list(cache.get("q", "Dirs").results) == ["/a"]
        assert cache.is_loading("q") is False

    def test_drop_loading_falls_back_to_previous_results(self):
        cache = ResultCache()
        cache.mark_loading("q", "Files", "Files", [GLOBAL_KEY])
        cache.settle("q", "Files", GLOBAL_KEY, results=[{"path": "a"}])
        cache.mark_loading("q", "Files", "Files", [GLOBAL_KEY])
        cache.drop_loading("q")
        assert cache.get("q", "Files").results[GLOBAL_KEY] == ScopedResults(
            results=[{"path": "a"}], loading=False
        )

    def test_drop_loading_removes_empty_query(self):
        cache = ResultCache()
        cache.mark_loading("q", "Pending", "Pending", [GLOBAL_KEY])
        cache.drop_loading("q")
        assert "q" not in cache

    def test_remove_provider(self):
        cache = ResultCache()
        for query in ("a", "b"):
            cache.mark_loading(query, "Files", "Files", [GLOBAL_KEY])
        cache.mark_loading("a", "Symbols", "Symbols", [GLOBAL_KEY])
        cache.remove_provider("Files")
        assert cache.get("a", "Files") is None
        assert cache.get("a", "Symbols") is not None
        assert "b" not in cache

    def test_least_recently_used_query_evicted(self):
        cache = ResultCache(max_queries=2)
        cache.mark_loading("a", "Files", "Files", [GLOBAL_KEY])
        cache.mark_loading("b", "Files", "Files", [GLOBAL_KEY])
        cache.mark_loading("a", "Files", "Files", [GLOBAL_KEY])
        cache.mark_loading("c", "Files", "Files", [GLOBAL_KEY])
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_clear(self):
        cache = ResultCache()
        cache.mark_loading("a", "Files", "Files", [GLOBAL_KEY])
        cache.clear()
        assert len(cache) == 0
