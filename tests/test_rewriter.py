from __future__ import annotations

import threading

import pytest

from bundlewire.errors import MissingReplacement
from bundlewire.replace.rewriter import TokenRewriter, build_pattern, rewrite
from bundlewire.replace.table import ReplacementTable

DEV = {"import.meta.env.DEV": "true"}


def test_replaces_guard_and_maps_positions() -> None:
    code = "if (import.meta.env.DEV) { x() }"
    result = rewrite(code, DEV)
    assert result is not None
    assert result.code == "if (true) { x() }"
    assert result.map is not None
    assert result.original_offset(0) == 0
    assert result.original_offset(4) == code.index("import")
    assert result.original_offset(6) == code.index("import")
    assert result.original_offset(8) == code.index(")")
    assert result.original_offset(len(result.code) - 1) == len(code) - 1
    for offset in range(len(result.code)):
        original = result.original_offset(offset)
        assert original is not None
        assert 0 <= original < len(code)


def test_similar_identifier_is_not_matched() -> None:
    assert rewrite("const import_meta_envDEV = 1", DEV) is None


@pytest.mark.parametrize(
    "code",
    [
        "import.meta.env.DEVELOPER",
        "ximport.meta.env.DEV",
        "import.meta.env.DEV_MODE",
        "importXmetaXenvXDEV",
    ],
)
def test_word_boundaries(code: str) -> None:
    assert rewrite(code, DEV) is None


def test_no_match_returns_none() -> None:
    assert rewrite("const x = 1;", ReplacementTable.for_mode("production")) is None


def test_empty_table_returns_none() -> None:
    assert rewrite("import.meta.env.DEV", {}) is None


def test_every_occurrence_is_replaced() -> None:
    table = ReplacementTable.for_mode("production")
    code = "\n".join(
        [
            "if (import.meta.env.DEV) a();",
            "if (import.meta.env.PROD) b();",
            "log(import.meta.env.MODE, import.meta.env.DEV);",
            "if (import.meta.vitest) { test() }",
        ]
    )
    result = rewrite(code, table)
    assert result is not None
    assert result.code == "\n".join(
        [
            "if (false) a();",
            "if (true) b();",
            'log("production", false);',
            "if (false) { test() }",
        ]
    )


def test_rewrite_is_idempotent() -> None:
    table = ReplacementTable.for_mode("development", trace=True)
    code = "if (import.meta.env.DEV && import.meta.env.BUNDLEWIRE_TRACE) trace(import.meta.env.MODE)"
    once = rewrite(code, table)
    assert once is not None
    assert rewrite(once.code, table) is None


def test_longest_token_wins() -> None:
    result = rewrite("a.b.c + a.b", {"a.b": "1", "a.b.c": "2"})
    assert result is not None
    assert result.code == "2 + 1"


def test_sourcemap_can_be_disabled() -> None:
    result = TokenRewriter(DEV, sourcemap=False).rewrite("import.meta.env.DEV")
    assert result is not None
    assert result.code == "true"
    assert result.map is None
    assert result.original_offset(0) is None


def test_sourcemap_payload() -> None:
    code = "const a = 1;\nif (import.meta.env.DEV) {}\n"
    result = TokenRewriter(DEV).rewrite(code, source="src/a.ts")
    assert result is not None
    payload = result.map.to_dict()
    assert payload["version"] == 3
    assert payload["sources"] == ["src/a.ts"]
    assert payload["sourcesContent"] == [code]
    assert payload["mappings"].count(";") == 1
    assert result.map.original_position_for(1, 4) == (1, 4)
    assert result.map.original_position_for(1, 8) == (1, 23)


def test_table_keys_always_resolve() -> None:
    for mode in ("development", "production", "test"):
        table = ReplacementTable.for_mode(mode)
        pattern = build_pattern(table)
        text = " ".join(table)
        assert {m.group(1) for m in pattern.finditer(text)} == set(table)
        assert rewrite(text, table) is not None


def test_missing_replacement_reports_token_and_table() -> None:
    rewriter = TokenRewriter(DEV)
    rewriter.pattern = build_pattern([*DEV, "import.meta.env.EXTRA"])
    with pytest.raises(MissingReplacement, match='missing replacement for "import.meta.env.EXTRA"') as exc:
        rewriter.rewrite("import.meta.env.DEV; import.meta.env.EXTRA")
    assert exc.value.token == "import.meta.env.EXTRA"
    assert exc.value.replacements == DEV
    assert '"import.meta.env.DEV": "true"' in str(exc.value)


def test_rewrite_is_pure_across_threads() -> None:
    rewriter = TokenRewriter(ReplacementTable.for_mode("production"))
    inputs = [f"if (import.meta.env.DEV) f{n}(import.meta.env.MODE)" for n in range(20)]
    expected = [rewriter.rewrite(code).code for code in inputs]
    results = {}

    def worker(n: int) -> None:
        results[n] = [rewriter.rewrite(code).code for code in inputs]

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert all(r == expected for r in results.values())
