"""HTTP API layer of the categories service.

- **main**: application factory, lifespan, health and info endpoints
- **routers**: the ``/api/categories`` REST resource and the HTML listing
- **middleware**: correlation ids, request logging and error handling
- **schemas**: request/response bodies and the standard error body
- **utils**: orjson-based JSON responses
"""
