"""HTTP routers: the category REST resource and the HTML listing page."""
