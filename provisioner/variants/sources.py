"""Upstream locations shared by every variant."""

JASPER_URL = "https://github.com/jasper-software/jasper.git"
LEPTONICA_URL = "https://github.com/DanBloomberg/leptonica.git"
TESSERACT_URL = "https://github.com/tesseract-ocr/tesseract.git"
TESSDATA_URL = "https://github.com/tesseract-ocr/tessdata/raw/main/{lang}.traineddata"
OPENCV_URL = "https://github.com/opencv/opencv.git"
OPENCV_CONTRIB_URL = "https://github.com/opencv/opencv_contrib.git"
OPENALPR_URL = "https://github.com/openalpr/openalpr.git"
