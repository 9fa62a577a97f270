"""
Edges of the app: the console REPL and the reminder notification sinks.
"""
