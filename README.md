# glab

`glab` holds the window-free, GPU-free parts of a small graphics laboratory:

- `glab.core`: `Timestep`, the `bit` flag helper, `make_array`, the package
  logger (`init_logging`, `get_logger`, with a `TRACE` level) and
  `log_assert`, which logs and raises `AssertionFailure` when its condition
  is false.
- `glab.framebuffer`: framebuffer specifications (`FramebufferTextureFormat`,
  `FramebufferTextureSpecification`, `FramebufferAttachmentSpecification`,
  `FramebufferSpecification`) and a `Framebuffer` record that splits its
  attachments into colour and depth and checks resizes against
  `MAX_FRAMEBUFFER_SIZE` (8192).
- `glab.unique_names`: `UniqueNameRegistry`, which gives repeated widget
  labels distinct names within one frame.
- `glab.apt_nodes` and `glab.apt_tree`: random arithmetic expression trees
  (`Node`, `NodeType`, `NodeTree`) that can be grown, mutated, crossed over,
  flattened to arrays and rebuilt from them.
- `glab.pictures`: `Picture` (one tree per colour channel), `encode_pictures`
  to pack pictures into rows of type codes and constants, and
  `evaluate_encoded` / `render_channel` to evaluate those rows per pixel
  with NumPy output.

## Installing

Install with your usual Python package installer. The only dependency is
NumPy; the `test` extra adds pytest.

## Expression trees

A tree is flattened in pre-order: each node's `NodeType` code, with `-1` and
`-2` (`OPEN_BRACE`, `CLOSE_BRACE`) around its children, plus a separate list
of the constants of the nodes that carry data (constants and the `x`/`y`
leaves).

```python
import random

from glab.apt_tree import NodeTree

# Plus(OpX, OpY)
tree = NodeTree.from_arrays([9, -1, 22, 23, -2], [0.0, 0.0], random.Random(1))
assert tree.eval(2.0, 3.0) == 5.0
assert tree.tree_to_arrays() == ([9, -1, 22, 23, -2], [0.0, 0.0])
print(tree.format_levels())
```

Trigonometric nodes take their input in degrees. A tree holds at most
`CAPACITY` (50) nodes; adding beyond that raises `TreeError`, as do malformed
encodings and evaluating an empty tree.

Random trees and genetic operations:

```python
import random

from glab.apt_tree import NodeTree

rng = random.Random(7)
a, b = NodeTree(rng), NodeTree(rng)
a.spawn_random_tree(17)
b.spawn_random_tree(17)

a.mutate_node(a.root.first_child(), 5)                  # regrow a subtree
NodeTree.swap_tree(a, a.root.first_child(), b, b.root.first_child())
a.copy_tree(a.root.first_child(), b.root)               # copy a subtree across
```

`swap_tree` refuses (returns `False`) when one node contains the other.
Copies give constants fresh random values.

## Pictures

```python
import random

from glab.pictures import Picture, encode_pictures, render_channel

rng = random.Random(42)
pictures = [Picture.random(rng, 17) for _ in range(4)]

rows = encode_pictures(pictures, 40)     # shape (6 * 4, 40), float32
red = render_channel(rows[0], rows[1], 64, 64)   # shape (64, 64)
image = pictures[0].render(64, 64)               # shape (64, 64, 3)
```

Each picture takes six rows: type codes then constants for red, green and
blue. Longer encodings are cut to the row width and shorter ones are padded
with zeros. In a rendered channel `x` is the column and `y` the row.
Per-pixel evaluation uses true `floor`/`ceil` and `atan(x, y)`, whereas
`NodeTree.eval` truncates toward zero; constants in an encoded row are read in
the order scopes are solved, innermost first.

## Unique names

```python
from glab.unique_names import UniqueNameRegistry

names = UniqueNameRegistry()
assert names.unique_name("Controls") == "Controls"
assert names.unique_name("Controls") == "Controls#2"
names.reset()                       # start of the next frame
assert names.unique_name("Controls") == "Controls#1"
```

## Framebuffers

```python
from glab.framebuffer import Framebuffer, FramebufferTextureFormat as Fmt

fb = Framebuffer.create(1280, 720, [Fmt.RGBA8, Fmt.DEPTH])
assert fb.resize(800, 600)
assert not fb.resize(0, 600)        # logged and ignored
```

`to_gl_format` maps a colour format to the matching driver constant and
raises `ValueError` for formats without one.

## What this package does not do

`glab` opens no window, creates no graphics context and draws nothing on a
GPU. It has no event system, input handling, camera, layer stack or
application main loop, and no command to run; `Framebuffer` only records
sizes and attachment formats. Pictures are rendered on the CPU into NumPy
arrays.