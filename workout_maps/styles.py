map_button_style = """
QPushButton {
    background-color: #2E7D32;
    color: white;
    border-radius: 8px;
    padding: 8px 16px;
    font-size: 15px;
    border: none;
}
QPushButton:hover {
    background-color: #1B5E20;
}
QPushButton:disabled {
    background-color: #9E9E9E;
}
"""

heatmap_button_style = """
QPushButton {
    background-color: #C62828;
    color: white;
    border-radius: 8px;
    padding: 8px 16px;
    font-size: 15px;
    border: none;
}
QPushButton:hover {
    background-color: #8E0000;
}
QPushButton:disabled {
    background-color: #9E9E9E;
}
"""

loading_style = """
QPushButton {
    background-color: #FFD600;
    color: #222;
    border-radius: 8px;
    padding: 8px 16px;
    font-size: 15px;
    border: none;
}
"""

workout_combobox_style = """
QComboBox {
    background-color: #f5f5f5;
    color: #222;
    border-radius: 6px;
    padding: 6px 18px 6px 8px;
    font-size: 14px;
    border: 1px solid #2E7D32;
}
"""
