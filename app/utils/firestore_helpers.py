"""
Firestore query helpers.

NOTE: For firebase_admin SDK, positional where() arguments still work; the
deprecation warning about FieldFilter is only a warning. Keeping the call in
one place makes the later switch a one-line change.
"""


def where_filter(query, field_path: str, op_string: str, value):
    """
    Usage:
        query = where_filter(collection, "status", "==", "pending")
        query = where_filter(query, "category", "==", "road")
    """
    return query.where(field_path, op_string, value)
