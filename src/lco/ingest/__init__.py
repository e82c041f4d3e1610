"""Pipeline runs for the amendment tracker.

    python -m lco.ingest --partitions senate house

Design principles:
    - The store IS the state - a chamber's table is the set of known amendments
    - Chambers are independent and run concurrently
    - Idempotent - deterministic point ids, safe to re-run

The entry point loads `.env` before `lco.settings` is first imported, so this
package does not import any submodules itself.
"""
