# slamgraph

Graph SLAM (simultaneous localisation and mapping) in Python. Load a factor
graph of vehicle poses and landmarks from a g2o or JSON file, run
Gauss–Newton iterations over it, and write the improved estimates back out.

## What it handles

Variables (vertices):

| Model type   | g2o keyword        | Content                    |
|--------------|--------------------|----------------------------|
| `Vehicle2D`  | `VERTEX_SE2`       | `x, y, rotation`           |
| `Landmark2D` | `VERTEX_XY`        | `x, y`                     |
| `Vehicle3D`  | `VERTEX_SE3:QUAT`  | `x, y, z, qx, qy, qz, qw`  |
| `Landmark3D` | `VERTEX_TRACKXYZ`  | `x, y, z`                  |

Factors (edges):

| Model type      | g2o keyword          | Connects                   |
|-----------------|----------------------|----------------------------|
| `Position2D`    | `EDGE_PRIOR_SE2`     | one `Vehicle2D`            |
| `Odometry2D`    | `EDGE_SE2`           | `Vehicle2D` → `Vehicle2D`  |
| `Observation2D` | `EDGE_SE2_XY`        | `Vehicle2D` → `Landmark2D` |
| `Position3D`    | `EDGE_SE3_PRIOR`     | one `Vehicle3D`            |
| `Odometry3D`    | `EDGE_SE3:QUAT`      | `Vehicle3D` → `Vehicle3D`  |
| `Observation3D` | `EDGE_SE3_TRACKXYZ`  | `Vehicle3D` → `Landmark3D` |

Vertices listed on a `FIX` line (or in `fixedVertices` in JSON) stay
unchanged during optimisation. Lines starting with `#` and blank lines in a
g2o file are ignored; any other unknown keyword is an error.

`EDGE_SE3_PRIOR` and `EDGE_SE3_TRACKXYZ` carry a sensor offset as their last
vertex token; only the identity offset with ID 0 is supported, declared as
`PARAMS_SE3OFFSET 0 0 0 0 0 0 0 1`. Files composed by `G2oParser` start with
that line whenever such edges are present.

## Command line

Installing the package provides the `slamgraph` command with two
subcommands:

    slamgraph optimize IN_FILE OUT_FILE [-n ITERATIONS]
    slamgraph convert IN_FILE OUT_FILE

`optimize` runs the given number of iterations (default 10) and writes the
result; `convert` rewrites a graph in another format. The format of each
file is chosen by its suffix: `.json` means JSON, anything else means g2o.
On a malformed file, an unwritable path or an unsolvable system the command
prints the error to standard error and exits with status 1.

## Library use

```python
from slamgraph.g2o import G2oParser
from slamgraph.optimizer import optimize

graph = G2oParser.parse_file("poses.g2o")
optimize(graph, 10)
G2oParser.compose_file(graph, "poses_optimized.g2o")
```

Convert between formats:

```python
from slamgraph.g2o import G2oParser
from slamgraph.json_format import JsonParser

graph = G2oParser.parse_file("poses.g2o")
JsonParser.compose_file(graph, "poses.json")
```

The same steps as one call each:

```python
from slamgraph.cli import convert_file, optimize_file

optimize_file("poses.g2o", "poses_optimized.g2o", 10)
convert_file("poses.g2o", "poses.json")
```

Both parsers also offer `parse_string_to_model`, `parse_file_to_model`,
`compose_model_to_string` and `compose_model_to_file`.

### The model

`FactorGraphModel` (in `slamgraph.model`) is the plain, serialisable form of
a graph: lists of `Vertex` and `Edge` records and the set of fixed vertex
IDs, with `to_dict` and `from_dict` for its JSON layout. `model_to_graph` and
`graph_to_model` convert between it and the `FactorGraph` the optimiser works
on.

```python
from slamgraph.json_format import JsonParser
from slamgraph.model import model_to_graph

model = JsonParser.parse_file_to_model("poses.json")
graph = model_to_graph(model)
```

The JSON layout (as written: two-space indentation, no trailing newline):

```json
{
  "vertices": [
    {"id": 0, "type": "Vehicle2D", "content": [1.0, 0.0, 1.57]}
  ],
  "edges": [
    {
      "type": "Position2D",
      "vertices": [0],
      "restriction": [0.0, 1.0, 3.13],
      "informationMatrix": [10.0, 0.0, 0.0, 0.0, 10.0, 0.0, 0.0, 0.0, 1.0]
    }
  ],
  "fixedVertices": []
}
```

Information matrices are stored in full and are expected to be symmetric;
g2o files hold only their upper triangle.

### Lower-level pieces

* `slamgraph.linear_system.calculate_h_b` builds the system matrix and
  gradient vector of a graph.
* `slamgraph.solver.solve` solves a symmetric positive-definite system by
  Cholesky decomposition.
* `slamgraph.iso3d` holds `Isometry3` and the gradients used by the 3D
  factors.
* `slamgraph.visual` computes the points and rotations one would draw for
  variables and factors (`variable_point`, `factor_point`,
  `measurement_point`, `rotation_from_2d`, `rotation_from_3d`).

## What it does not do

There is no viewer: `slamgraph.visual` only computes geometry and opens no
window. The package has no other file formats than g2o and JSON, and no
g2o sensor offsets other than the identity offset with ID 0.

## Errors

* `slamgraph.parsing.ParseError` (a `ValueError`) is raised for files that
  cannot be read or written and for malformed content.
* `ValueError` is raised by `model_to_graph` for unsupported vertex or edge
  types and for edges naming unknown vertex IDs, and by `calculate_h_b` for
  factors that do not fit the variables they join.
* `slamgraph.solver.NotPositiveDefiniteError` (a `ValueError`) is raised when
  a system built during optimisation cannot be solved by Cholesky
  decomposition, for example when no vertex is fixed and no prior anchors
  the graph.