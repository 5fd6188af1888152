"""
Catalog Django application.

This app reconciles the storefront product catalog: it collapses duplicate
products, assigns brands and categories from product names, compacts the
label tables, and resolves missing primary images from external sources.
"""
