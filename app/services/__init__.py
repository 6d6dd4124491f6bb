# Services module initialization
# Avoid eager imports; submodules are imported where needed.
