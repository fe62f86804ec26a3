"""
Phylogenetic tree parsing and manipulation.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class TreeNode:
    """
    Phylogenetic tree node.

    Attributes
    ----------
    id : int
        Node identifier (pre-order index, root is 0)
    name : Optional[str]
        Node name (for leaves) or node label (for internal nodes)
    parent : Optional[TreeNode]
        Parent node
    children : list[TreeNode]
        Child nodes
    branch_length : float
        Branch length to parent
    """

    id: int
    name: Optional[str] = None
    parent: Optional["TreeNode"] = None
    children: list["TreeNode"] = field(default_factory=list)
    branch_length: float = 0.0

    @property
    def is_leaf(self) -> bool:
        """Check if node is a leaf."""
        return len(self.children) == 0


@dataclass
class Tree:
    """
    Phylogenetic tree.

    Attributes
    ----------
    root : TreeNode
        Root node of the tree
    n_nodes : int
        Total number of nodes
    n_leaves : int
        Number of leaf nodes
    leaf_names : list[str]
        Names of leaf nodes, in pre-order
    """

    root: TreeNode
    n_nodes: int
    n_leaves: int
    leaf_names: list[str]

    @classmethod
    def from_newick(cls, newick_string: str) -> "Tree":
        """
        Parse Newick format tree string.

        Parameters
        ----------
        newick_string : str
            Newick format tree

        Returns
        -------
        Tree
            Parsed tree

        Examples
        --------
        >>> tree = Tree.from_newick("((A:0.1,B:0.2):0.15,C:0.3);")
        >>> tree.leaf_names
        ['A', 'B', 'C']
        """
        # Remove [...] comments
        newick = re.sub(r'\[[^\]]*\]', '', newick_string).strip()

        if ';' not in newick:
            raise ValueError("Invalid Newick format: missing semicolon")

        tree_line = newick[:newick.index(';')]
        tree_line = tree_line.replace('\n', '').replace('\t', '').replace('\r', '')
        if not tree_line.strip():
            raise ValueError("Invalid Newick format: no tree found")

        node_id_counter = [0]  # Use list for mutable counter

        def skip_whitespace(s: str, pos: int) -> int:
            """Skip whitespace characters."""
            while pos < len(s) and s[pos] == ' ':
                pos += 1
            return pos

        def parse_node(s: str, start: int, parent: Optional[TreeNode] = None) -> tuple[TreeNode, int]:
            """Parse a node from position start in string s."""
            node = TreeNode(id=node_id_counter[0])
            node_id_counter[0] += 1
            node.parent = parent
            pos = skip_whitespace(s, start)

            # Internal node: parse children
            if pos < len(s) and s[pos] == '(':
                pos = skip_whitespace(s, pos + 1)
                while True:
                    child, pos = parse_node(s, pos, node)
                    node.children.append(child)
                    pos = skip_whitespace(s, pos)

                    if pos < len(s) and s[pos] == ',':
                        pos = skip_whitespace(s, pos + 1)
                        continue
                    elif pos < len(s) and s[pos] == ')':
                        pos = skip_whitespace(s, pos + 1)
                        break
                    else:
                        raise ValueError(f"Invalid Newick format: expected ',' or ')' at position {pos}")

            # Node name (leaves) or label (internal nodes)
            name_start = pos
            while pos < len(s) and s[pos] not in ',:(); ':
                pos += 1
            if pos > name_start:
                node.name = s[name_start:pos]

            pos = skip_whitespace(s, pos)

            # Branch length (e.g., :0.123 or : 0.123)
            if pos < len(s) and s[pos] == ':':
                pos = skip_whitespace(s, pos + 1)
                length_start = pos
                while pos < len(s) and s[pos] not in ',(); ':
                    pos += 1
                try:
                    node.branch_length = float(s[length_start:pos])
                except ValueError:
                    raise ValueError(f"Invalid branch length: {s[length_start:pos]}")

            return node, pos

        root, pos = parse_node(tree_line, 0, None)
        if skip_whitespace(tree_line, pos) != len(tree_line):
            raise ValueError(f"Invalid Newick format: unexpected text at position {pos}")

        return cls._from_root(root)

    @classmethod
    def _from_root(cls, root: TreeNode) -> "Tree":
        def count_nodes(node: TreeNode) -> tuple[int, int, list[str]]:
            """Count total nodes, leaves, and collect leaf names."""
            if node.is_leaf:
                leaf_name = node.name if node.name else str(node.id)
                return 1, 1, [leaf_name]
            total_nodes = 1
            total_leaves = 0
            leaf_names = []
            for child in node.children:
                n, l, names = count_nodes(child)
                total_nodes += n
                total_leaves += l
                leaf_names.extend(names)
            return total_nodes, total_leaves, leaf_names

        n_nodes, n_leaves, leaf_names = count_nodes(root)

        return cls(
            root=root,
            n_nodes=n_nodes,
            n_leaves=n_leaves,
            leaf_names=leaf_names
        )

    @classmethod
    def from_file(cls, filepath: Path | str) -> "Tree":
        """Read the first Newick tree of a file."""
        with open(filepath, 'r') as f:
            return cls.from_newick(f.read())

    def postorder(self) -> list[TreeNode]:
        """
        Return nodes in post-order traversal (leaves to root).

        Returns
        -------
        list[TreeNode]
            Nodes in post-order
        """
        result = []

        def traverse(node: TreeNode) -> None:
            for child in node.children:
                traverse(child)
            result.append(node)

        traverse(self.root)
        return result

    def preorder(self) -> list[TreeNode]:
        """Return nodes in pre-order traversal (root to leaves)."""
        result = []

        def traverse(node: TreeNode) -> None:
            result.append(node)
            for child in node.children:
                traverse(child)

        traverse(self.root)
        return result

    def get_branches(self) -> list[tuple[TreeNode, TreeNode]]:
        """
        Get all branches as (parent, child) pairs, in pre-order.

        Returns
        -------
        list[tuple[TreeNode, TreeNode]]
            List of (parent, child) tuples for each branch
        """
        branches = []

        def traverse(node: TreeNode) -> None:
            for child in node.children:
                branches.append((node, child))
                traverse(child)

        traverse(self.root)
        return branches

    def leaves(self) -> list[TreeNode]:
        """Leaf nodes in pre-order."""
        return [node for node in self.preorder() if node.is_leaf]

    def branch_ids(self) -> list[int]:
        """Ids of all non-root nodes (one per branch)."""
        return [child.id for _, child in self.get_branches()]

    def to_newick(self, tag_ids: bool = False) -> str:
        """
        Format the tree as a Newick string.

        Parameters
        ----------
        tag_ids : bool
            If True, leaves are renamed '<id>_<name>' and internal nodes are
            labelled with their id, so that node ids can be read off the tree.
        """
        def format_node(node: TreeNode) -> str:
            if node.is_leaf:
                name = node.name if node.name else str(node.id)
                text = f"{node.id}_{name}" if tag_ids else name
            else:
                inner = ",".join(format_node(child) for child in node.children)
                label = str(node.id) if tag_ids else (node.name or "")
                text = f"({inner}){label}"
            if node.parent is not None:
                text += f":{node.branch_length:g}"
            return text

        return format_node(self.root) + ";"


def read_tree_segments(filepath: Path | str) -> tuple[list[Tree], list[float]]:
    """
    Read trees annotated with the genomic segment they cover.

    Each record is ``<begin> <end> <newick>;`` where begin and end are
    fractions of the alignment. A Newick string may span several lines;
    lines are joined without a separator, so a label or branch length may
    wrap. The begin and end fields must sit on one line.
    Blank lines and lines starting with '#' are ignored.

    Parameters
    ----------
    filepath : Path or str
        Segment file

    Returns
    -------
    trees : list[Tree]
        Trees in file order
    positions : list[float]
        Segment boundaries, of length len(trees) + 1, starting at 0

    Raises
    ------
    ValueError
        If a record is malformed, segments are not contiguous, the last
        segment does not end at 1, or trees have different leaf names.

    Examples
    --------
    File content::

        0 0.5 ((A:0.1,B:0.1):0.1,C:0.2);
        0.5 1 ((A:0.1,C:0.1):0.1,B:0.2);
    """
    with open(filepath, 'r') as f:
        lines = [line.strip() for line in f]
    content = "".join(line for line in lines if line and not line.startswith('#'))

    records = content.split(';')
    if records[-1].strip():
        raise ValueError("Error when parsing tree file: incomplete tree.")

    trees = []
    positions = [0.0]
    for record in records[:-1]:
        fields = record.strip().split(None, 2)
        if len(fields) < 1:
            raise ValueError("Error when parsing tree file: empty record.")
        if len(fields) < 2:
            raise ValueError("Error when parsing tree file: no ending position.")
        if len(fields) < 3:
            raise ValueError("Error when parsing tree file: no tree.")
        try:
            begin = float(fields[0])
            end = float(fields[1])
        except ValueError:
            raise ValueError(
                f"Error when parsing tree file: invalid segment positions '{fields[0]} {fields[1]}'."
            )

        tree = Tree.from_newick(fields[2] + ';')

        if trees and set(tree.leaf_names) != set(trees[0].leaf_names):
            raise ValueError("Error: all trees must have the same leaf names.")
        if begin != positions[-1]:
            raise ValueError(
                f"Error when parsing tree file: segments do not match: "
                f"{begin:g} against {positions[-1]:g}."
            )
        if end < begin:
            raise ValueError(
                f"Error when parsing tree file: segment ends before it begins ({begin:g} {end:g})."
            )

        trees.append(tree)
        positions.append(end)

    if not trees:
        raise ValueError("Error when parsing tree file: no tree found.")
    if positions[-1] != 1.0:
        raise ValueError(
            f"Error when parsing tree file: last segment ends at {positions[-1]:g}, expected 1."
        )

    logger.debug("Read %d tree segments from %s", len(trees), filepath)
    return trees, positions
