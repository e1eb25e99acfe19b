"""
julia_atlas.registry — Reading a METADATA-style registry checkout.

Modules:
    scanner     — Enumerate packages and allocate ids (PackageIndex).
    versions    — Latest-version selection, requires parsing, Julia constraint.
    dependents  — Reverse dependencies inverted from the requires files.
"""
