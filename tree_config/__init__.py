# AGPL-3.0 License

"""
Drone config extension that discovers pipeline files next to changed code.
"""
