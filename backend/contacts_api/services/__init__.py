# Services package init
"""
Contact API — Services Layer
==============================

What:  Persistence logic sitting between routes (HTTP) and the database.
How:   ContactStore owns every query against the `contacts` table and reports
       expected outcomes as StoreResult values. It is constructed once in the
       application lifespan and injected into routes.
"""
