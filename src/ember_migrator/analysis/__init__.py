"""
Static Analysis Package.

This package contains the passes that inspect a parsed program before any
rewrite decision is made.

Modules:
    - ``scope``: Lexical scopes, declarations and reference sites.
"""
