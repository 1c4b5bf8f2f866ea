"""
清理核心逻辑：有效备份集合加载、孤立文件对账、运行控制和调度
"""
