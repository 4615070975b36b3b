# Services package init
"""
SkillSwap Backend: Services Layer
=================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - SwapRequestService: swap-request lifecycle and its authorization rules
    - UserDirectory: profile lookups, browsing and owner-only edits
    - FileService: profile photo validation, storage and cleanup

Services that touch the database receive an AsyncSession at construction;
routes build one per request. FileService has no per-request state and is
shared as the `file_service` singleton.
"""
