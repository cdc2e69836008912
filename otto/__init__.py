"""otto: build autotools-style source packages from scratch.

For each build profile, every configured package is downloaded, extracted,
configured, built and installed into that profile's own prefix.

Core design goals:
- Declarative profiles x packages config
- Sequential, fail-fast builds
- Manual resume at a named package
- Explicit argv/env/cwd for every external command
"""

__all__ = []
