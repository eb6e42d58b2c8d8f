"""
Name Registry - API Routes Package
===================================

Route Inventory:
    - registry.py:  POST /api/store       (upsert id → name)
                    GET  /api/get/{id}    (single record)
                    GET  /api/all         (all records, ordered by id)
    - health.py:    GET  /health          (liveness, no datastore access)
    - pages.py:     GET  /                (landing page + static assets)

Routes stay thin: extract input, call NameService, return the response
model. Validation and error translation live in the service.
"""
