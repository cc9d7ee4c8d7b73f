"""
rsd package

Remote scripting development: a CLI that scaffolds, builds and deploys
bundled scripts to a remote endpoint.

Key responsibilities are split across modules:
- `settings.py`: load environment variables and the project config lookup
- `scaffold.py`: copy/render the bundled default project files (`init`)
- `compiler.py`: compile sources through the external bundler (`build`)
- `packager.py`: collect the build output into an in-memory package
- `client.py`: upload the package to the deploy endpoint
- `backup.py`: write the files returned by the endpoint to a local backup tree
- `cli.py`: CLI entrypoint and orchestration (init / build / deploy)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
