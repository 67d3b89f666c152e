"""Catalog and order service for the storefront"""
