"""Document tree nodes and helpers for numbering, citing, styling and highlighting."""