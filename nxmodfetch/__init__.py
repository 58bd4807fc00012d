"""
nxmodfetch - Switch 模拟器模组下载工具

从 GitHub 模组仓库中找出适用于本地已安装游戏及其更新版本的模组，
并下载到模拟器的模组加载目录。
"""

__version__ = "0.1.0"
