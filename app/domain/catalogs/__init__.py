"""Catalogs domain - branches, appointment types and holidays"""
