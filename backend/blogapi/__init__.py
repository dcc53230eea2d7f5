"""Application package for the blog backend.

This package exposes the service, repository and model modules used by
the FastAPI application. Build an application with
`blogapi.main.create_app`; individual modules contain the concrete
implementations and documentation.
"""
