"""Release catalog retrieval and patch resolution.

- semver.py: tag parsing
- model.py: ReleaseRecord, TrackedProject
- catalog.py: paginated fetch
- normalize.py: draft/prerelease filtering and date ordering
- resolver.py: patch selection
- service.py: per-project pipelines, run concurrently
"""
