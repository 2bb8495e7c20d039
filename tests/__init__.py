"""
vex-server test suite

Structure:
- unit/: validator, types, formatting, config, logging, executor
- integration/: the HTTP app end to end against a fake extraction program
- fixtures/: fake_vex.py, a scriptable stand-in for the real `vex` binary
"""
