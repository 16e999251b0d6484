"""Formatting, ignore rules and the interactive cleaner"""
