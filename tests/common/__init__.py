"""测试共用辅助工具"""
