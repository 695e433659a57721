# AGPL-3.0 License
