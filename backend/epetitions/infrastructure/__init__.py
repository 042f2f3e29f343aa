"""Infrastructure — database sessions, logging, mail delivery and the site cache store.

Invariants:
    - Everything here does IO or holds process state; core/ never imports from it
"""
