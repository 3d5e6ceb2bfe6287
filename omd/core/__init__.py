"""omd 核心模块"""
