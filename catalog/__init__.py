"""Library Catalog - Core Package

This package contains the record persistence and query layer:
- Data model (book.py)
- Line codec for the storage file (serializer.py)
- In-memory store mirrored to the flat file (store.py)
- Query and mutation operations (library.py)
- Exception taxonomy (errors.py)
"""
