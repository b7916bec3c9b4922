# Task board: columns, tasks, drag reordering, local persistence, import/export
#
# Components:
#   ids.py      - Opaque identifier generation for columns and tasks
#   schema.py   - Data model (Board, Column, Task, Theme) and the default seed
#   errors.py   - BoardError hierarchy surfaced to collaborators
#   reorder.py  - Pure drag-reorder engine (ReorderRequest, reorder, move_column)
#   store.py    - SQLite key-value persistence (board snapshot + theme)
#   codec.py    - Export/import of the board document
#   board.py    - BoardStore: the single owner of the board and its mutations
#   config.py   - YAML/environment configuration
#   server.py   - Flask JSON API for the UI layer

__version__ = "0.3.0"
