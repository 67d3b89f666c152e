"""Shopper-facing storefront service"""
