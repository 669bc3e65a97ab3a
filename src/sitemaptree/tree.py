"""Path tree construction and rendering."""

import io
from collections.abc import Iterable
from urllib.parse import urlsplit

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from sitemaptree.models import SiteTree

# Cells taken by one level of tree guides ("├── ")
GUIDE_WIDTH = 4


def path_segments(url: str) -> list[str]:
    """
    Split the path of a URL into non-empty segments.

    Query strings and fragments are ignored, and empty segments from
    repeated or trailing slashes are dropped ("/a//b/" -> ["a", "b"]).

    Args:
        url: Absolute URL.

    Returns:
        Path segments, outermost first.
    """
    return [part for part in urlsplit(url).path.split("/") if part]


def build_site_tree(urls: Iterable[str]) -> SiteTree:
    """
    Build a nested mapping of path segments from URLs.

    Each URL adds its full chain of segments below the root, so every segment
    at position i of any URL is reachable at depth i. Duplicate URLs are
    harmless. A path that is a strict prefix of another ("/a" next to
    "/a/b") leaves no trace of its own in the result.

    Args:
        urls: URLs to insert, in any order.

    Returns:
        The root SiteTree; empty when ``urls`` is empty.
    """
    tree: SiteTree = {}
    for url in urls:
        node = tree
        for segment in path_segments(url):
            node = node.setdefault(segment, {})
    return tree


def tree_depth(tree: SiteTree) -> int:
    """Return the number of levels below the root (0 for an empty tree)."""
    if not tree:
        return 0
    return 1 + max(tree_depth(child) for child in tree.values())


def render_tree(tree: SiteTree, label: str = "/") -> Tree:
    """Render a SiteTree as a rich Tree, keeping insertion order."""
    root = Tree(Text(label, style="bold"))
    _add_children(root, tree)
    return root


def _add_children(parent: Tree, node: SiteTree) -> None:
    for segment, child in node.items():
        branch = parent.add(Text(segment))
        _add_children(branch, child)


def _widest_line(node: SiteTree, depth: int = 1) -> int:
    return max(
        (
            max(GUIDE_WIDTH * depth + cell_len(segment), _widest_line(child, depth + 1))
            for segment, child in node.items()
        ),
        default=0,
    )


def format_tree(tree: SiteTree, label: str = "/", width: int = 200) -> str:
    """Return the plain-text rendering of a SiteTree, one node per line."""
    width = max(width, cell_len(label), _widest_line(tree)) + 1
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, highlight=False)
    console.print(render_tree(tree, label))
    # Rich pads rendered lines to the console width
    return "".join(f"{line.rstrip()}\n" for line in buffer.getvalue().splitlines())
