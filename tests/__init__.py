"""
SceneKit Test Suite
"""
