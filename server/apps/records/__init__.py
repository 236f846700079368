"""Generic persistence for soft-deletable records.

This app owns the pieces that are not specific to files:
- The shared record fields (id, timestamps, soft-delete flag)
- Capability protocols the unit of work dispatches on
- The unit of work itself
"""
