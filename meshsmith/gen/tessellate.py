from __future__ import annotations

from meshsmith.core.mesh import SubMesh


def tessellate_grid(sub: SubMesh, width: int, height: int, double_sided: bool = False) -> int:
    """
    Triangulate a width x height vertex grid already appended row-major.

    Each cell (row, col) emits (a, b, c) and (c, b, d) with
      a = (row+1)*W + col,  b = row*W + col,
      c = (row+1)*W + col+1, d = row*W + col+1.
    With double_sided the traversal is repeated with the row direction
    reversed, producing back faces over the same vertices.

    Returns the number of triangles emitted.
    """
    width, height = int(width), int(height)
    if width < 2 or height < 2:
        return 0

    passes = [(0, 1)]
    if double_sided:
        passes.append((height - 1, -1))

    emitted = 0
    for row, step in passes:
        for _ in range(height - 1):
            nxt = row + step
            for col in range(width - 1):
                a = nxt * width + col
                b = row * width + col
                c = nxt * width + col + 1
                d = row * width + col + 1
                sub.add_triangle(a, b, c)
                sub.add_triangle(c, b, d)
                emitted += 2
            row = nxt
    return emitted
