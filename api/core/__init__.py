"""
Cross-cutting pieces of the projects service: settings, logging, the error
taxonomy, the Postgres and Redis pool handles, and schema migrations.

Feature SQL and request handling live in `projects/` and `registry/`.
"""
