"""
Pure helpers shared by services and routes: calendar ranges and exports.
"""
