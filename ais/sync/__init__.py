"""Sync — converge project links with the manifests and the source repository.

This package provides:
- Engine: link, unlink and import of a single entry for any adapter
- Handlers: add/remove/import commands that keep manifests in step with links
- Install: recreate every link recorded in a project's manifests
"""
