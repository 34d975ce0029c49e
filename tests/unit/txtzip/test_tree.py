from __future__ import annotations

import itertools

import pytest

from txtzip.tree import TreeNode, build_tree, build_tree_lines, render_tree

PATHS = ["src/main.ts", "README.md", "src/lib/util.ts", "a/b/c/deep.ts"]


@pytest.mark.unit
def test_render_tree_draws_connectors_and_directory_suffixes() -> None:
    expected = "\n".join(
        [
            "├── a/",
            "│   └── b/",
            "│       └── c/",
            "│           └── deep.ts",
            "├── src/",
            "│   ├── lib/",
            "│   │   └── util.ts",
            "│   └── main.ts",
            "└── README.md",
        ],
    )

    assert render_tree(build_tree(PATHS)) == expected


@pytest.mark.unit
def test_render_tree_is_stable_under_input_permutations() -> None:
    renders = {render_tree(build_tree(list(p))) for p in itertools.permutations(PATHS)}

    assert len(renders) == 1


@pytest.mark.unit
def test_siblings_sort_directories_first_then_case_sensitive() -> None:
    lines = build_tree_lines(build_tree(["b.txt", "B.txt", "a.txt", "zdir/x.txt", "Adir/y.txt"]))

    assert [line.split(" ", 1)[1] for line in lines if not line.startswith("│")] == [
        "Adir/",
        "zdir/",
        "B.txt",
        "a.txt",
        "b.txt",
    ]


@pytest.mark.unit
def test_build_tree_creates_intermediate_directories_once() -> None:
    root = build_tree(["pkg/a.py", "pkg\\b.py", "pkg/a.py"])

    assert root.name == ""
    assert [n.name for n in root.children] == ["pkg"]
    pkg = root.children[0]
    assert not pkg.is_file
    assert [(n.name, n.is_file) for n in pkg.children] == [("a.py", True), ("b.py", True)]


@pytest.mark.unit
def test_empty_tree_renders_nothing() -> None:
    assert render_tree(build_tree([])) == ""
    assert build_tree_lines(TreeNode()) == []
