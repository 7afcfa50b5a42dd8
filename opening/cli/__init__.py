"""CLI 모듈"""
