"""Graph SLAM: Gauss-Newton optimisation of factor graphs read from g2o or JSON files."""

__version__ = "0.1.0"