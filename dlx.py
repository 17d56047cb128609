# dlx.py
# Algorithm X (Dancing Links) over a sparse 0/1 matrix

from __future__ import annotations

from typing import Iterator


class ColumnNode:
    __slots__ = ("name", "size", "left", "right", "up", "down")

    def __init__(self, name: int):
        self.name = name
        self.size = 0
        self.left: ColumnNode = self
        self.right: ColumnNode = self
        self.up: Node | ColumnNode = self
        self.down: Node | ColumnNode = self


class Node:
    __slots__ = ("column", "row_id", "left", "right", "up", "down")

    def __init__(self, column: ColumnNode, row_id: int):
        self.column = column
        self.row_id = row_id
        self.left: Node = self
        self.right: Node = self
        self.up: Node | ColumnNode = self
        self.down: Node | ColumnNode = self


class DLXSolver:
    """Exact cover: pick rows so that every column holds exactly one 1."""

    def __init__(self, num_columns: int):
        self.header = ColumnNode(-1)
        self.columns = [ColumnNode(i) for i in range(num_columns)]
        self.rows = 0
        self.updates = 0  # rows tried so far
        self.aborted = False
        prev = self.header
        for col in self.columns:
            col.left = prev
            col.right = self.header
            prev.right = col
            self.header.left = col
            prev = col

    def add_row(self, row_id: int, column_indices: list[int]) -> None:
        first: Node | None = None
        for c_idx in sorted(set(column_indices)):
            column = self.columns[c_idx]
            node = Node(column, row_id)

            # Append at the bottom of the column
            node.down = column
            node.up = column.up
            column.up.down = node
            column.up = node
            column.size += 1

            # Append at the end of the row ring
            if first is None:
                first = node
            else:
                node.right = first
                node.left = first.left
                first.left.right = node
                first.left = node
        self.rows += 1

    def _cover(self, column: ColumnNode) -> None:
        column.right.left = column.left
        column.left.right = column.right
        for row in self._down(column):
            for node in self._right(row):
                node.down.up = node.up
                node.up.down = node.down
                node.column.size -= 1

    def _uncover(self, column: ColumnNode) -> None:
        for row in self._up(column):
            for node in self._left(row):
                node.column.size += 1
                node.down.up = node
                node.up.down = node
        column.right.left = column
        column.left.right = column

    @staticmethod
    def _down(column: ColumnNode) -> Iterator[Node]:
        row = column.down
        while row is not column:
            yield row
            row = row.down

    @staticmethod
    def _up(column: ColumnNode) -> Iterator[Node]:
        row = column.up
        while row is not column:
            yield row
            row = row.up

    @staticmethod
    def _right(row: Node) -> Iterator[Node]:
        node = row.right
        while node is not row:
            yield node
            node = node.right

    @staticmethod
    def _left(row: Node) -> Iterator[Node]:
        node = row.left
        while node is not row:
            yield node
            node = node.left

    def _choose_column(self) -> ColumnNode:
        # Fewest remaining rows first
        best = self.header.right
        col = best.right
        while col is not self.header:
            if col.size < best.size:
                best = col
            col = col.right
        return best

    def solve(self, limit: int | None = None) -> Iterator[list[int]]:
        """Yield every exact cover as a list of row ids.

        With ``limit`` set the search stops after that many row selections and
        ``aborted`` is set; the matrix is fully restored either way.
        """
        solution: list[Node] = []
        self.aborted = False

        def search() -> Iterator[list[int]]:
            if self.header.right is self.header:
                yield [node.row_id for node in solution]
                return

            column = self._choose_column()
            if column.size == 0:
                return

            self._cover(column)
            for row in self._down(column):
                if limit is not None and self.updates >= limit:
                    self.aborted = True
                    break
                self.updates += 1
                solution.append(row)
                for node in self._right(row):
                    self._cover(node.column)

                yield from search()

                solution.pop()
                for node in self._left(row):
                    self._uncover(node.column)
            self._uncover(column)

        yield from search()

    def solve_one(self, limit: int | None = None) -> list[int] | None:
        return next(self.solve(limit), None)
