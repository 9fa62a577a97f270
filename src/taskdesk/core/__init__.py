"""
Core building blocks shared by the task subsystem and the connectors.

- errors.py: exception taxonomy
- ports.py: Protocols the services depend on
- clock.py: wall clock used outside of tests
- state.py: AppContext (explicit owner of storage, lock and services)
"""
