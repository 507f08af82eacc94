"""
Poem Module
===========

Fetches a poem from the Jinrishici API and stores it.

- Domain: the normalized ``Poem`` record
- Application: response DTOs, normalization and the collection service
- Infrastructure: API client, table definition, repository, scheduler
"""
