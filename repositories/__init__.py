"""
repositories/ - Data Access Layer
==================================
One repository per table. All SQL lives here, always with bound parameters;
rows come back as model objects and database errors propagate to the
service layer unchanged.
"""
