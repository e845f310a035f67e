"""EC2 Decommission - dependency-ordered teardown of an EC2 instance and its attached resources."""

__version__ = "0.1.0"
