"""
All the structures to represent the resources, their states, and changes.

All the functions are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
