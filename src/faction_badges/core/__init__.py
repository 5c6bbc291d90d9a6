"""
Core module for application configuration, database setup, and dependency injection.

This module contains the foundational infrastructure for the FastAPI application:
- Configuration management
- Database engine and session factory setup
- Dependency injection setup
- Custom exceptions
"""
