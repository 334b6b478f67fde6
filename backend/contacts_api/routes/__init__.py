# Routes package init
"""
Contact API — API Routes Package
==================================

Route Inventory:
    - health.py:    GET /                     (liveness banner)
                    GET /ping                 (health check)
    - contacts.py:  GET    /api/contacts      (list, newest first)
                    POST   /api/contacts      (create)
                    GET    /api/contacts/{id} (fetch one)
                    PUT    /api/contacts/{id} (partial update)
                    PATCH  /api/contacts/{id} (partial update)
                    DELETE /api/contacts/{id} (delete)

Routes stay THIN: read the request, call the store once, map the result to a
status code and body.
"""
