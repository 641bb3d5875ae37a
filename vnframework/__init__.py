"""
Visual novel framework.

Dialogue layer built on top of the engine:
- Components (text runs, mode configuration, reveal state, story log)
- Dialog (markup parser, reveal engine, story pages, scripts, story library)
"""
