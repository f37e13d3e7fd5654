"""Sai Ren agent HTTP routers."""
