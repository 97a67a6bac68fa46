"""
塔罗三卡 - 三张卡牌倍率小游戏的回合引擎

玩家设定下注额、开始回合、翻开三张背面朝上的卡牌，按已翻开的正倍率之积
乘以下注额获得派彩。本包包含引擎（加权抽取、经济系统、回合状态机、自动游戏），
以及存储与终端前端的参考实现。
"""

__version__ = "1.0.0"
__author__ = "Tarot Three-Card Development Team"
