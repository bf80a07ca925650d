"""
records — persistence adapter for the two record collections.

    models   — SQLAlchemy ORM tables (first_aid, sos_profiles)
    schemas  — pydantic domain types exchanged with the HTTP layer
    store    — RecordStore: list / get / upsert
"""
