"""tf-next-build - Package framework build output for a Terraform deployment.

This package turns the output of a framework build into deployable artifacts:
one zip per lambda, a zip of the static website files, and a config.json
manifest describing how the edge proxy routes requests.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
