"""Core session state and rotation math"""
