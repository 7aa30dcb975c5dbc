"""
Depth-first traversal over a parsed BeautifulSoup document.

``Walker`` visits nodes without touching the tree. ``Transformer`` lets the
callback keep, replace or remove each node while the traversal is running.
"""

from typing import Callable, Optional

from bs4.element import PageElement, Tag


WalkFunc = Callable[[PageElement], None]
TransformFunc = Callable[[PageElement], Optional[PageElement]]


class Walker:
    """
    Visits every descendant of a root node in depth-first pre-order.

    The callback must not modify the tree; use ``Transformer`` for that.
    """

    def __init__(self, func: Optional[WalkFunc] = None):
        self.func = func

    def walk(self, root: Tag) -> None:
        if self.func is None:
            return
        for node in root.descendants:
            self.func(node)


class Transformer:
    """
    Rewrites the descendants of a root node in depth-first pre-order.

    For every node the callback returns one of:

    - the node itself: the node is kept and its children are visited;
    - another node: the node is replaced at the same position and the
      replacement's children are visited;
    - ``None``: the node and its subtree are removed from the tree.

    The root itself is never passed to the callback. Exceptions raised by
    the callback (normally ``ProcessingError``) stop the traversal and
    propagate to the caller; the tree is left as far as it got.
    """

    def __init__(self, func: Optional[TransformFunc] = None):
        self.func = func

    def transform(self, root: Tag) -> None:
        # Next node to visit on each open level; the deepest level is last
        pending = [root.contents[0] if root.contents else None]
        while pending:
            node = pending.pop()
            if node is None:
                continue

            # The callback may detach the node, which clears its sibling links
            following = node.next_sibling

            result = node if self.func is None else self.func(node)
            if result is None:
                node.extract()
            elif result is not node:
                node.replace_with(result)

            pending.append(following)
            if isinstance(result, Tag) and result.contents:
                pending.append(result.contents[0])
