"""
FastAPI Application Package

Entry point for the backend API. create_app() wires the exchange registry,
cache, aggregator and product service into a FastAPI application.
"""
